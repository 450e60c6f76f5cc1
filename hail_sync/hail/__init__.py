"""
Hail API integration: OAuth tokens, API client, importers and the fetch queue.
"""
