"""NexHealth practice tools.

This package contains a small async client for the NexHealth dental
practice-management API, typed accessors for patients, scheduling and
billing data, two command-line tools and a minimal billing dashboard.
"""
