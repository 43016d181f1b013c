"""ytcatalog - YouTube channel video catalog service."""
