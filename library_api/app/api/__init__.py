"""
API package containing versioned routes.

A version subpackage exposes a top-level ``router`` which includes all
of its resource endpoints; ``main.create_app`` mounts it under
``settings.api_prefix``.
"""
