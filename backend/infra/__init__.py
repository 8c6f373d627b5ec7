"""Infrastructure helpers: request metrics and health reporting."""
