"""Channel catalog services."""
