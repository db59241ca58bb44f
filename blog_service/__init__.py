"""Blog API: авторы, посты и владение постами."""
