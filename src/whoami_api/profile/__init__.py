"""Client description: user agent and location."""
