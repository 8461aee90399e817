"""
configwatch Services

- config - snapshot model, cache, providers and the refresh task
- display - HTTP front end rendering the current snapshot
"""
