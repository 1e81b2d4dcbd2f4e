"""Care operations package.

Organised by feature modules (discipline, categories, users, ...) with a thin
Flask controller layer on top of service/repository layers.
"""
