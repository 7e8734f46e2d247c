"""Visit accounting: counter stores and the failover service."""
