"""
django-blog-api - A JSON REST API for running a blog.

Features:
- Articles with draft/published/archived workflow and SEO metadata
- Hierarchical categories and flat tags with unique slugs
- JWT authentication with rotating refresh tokens
- Role based access (user, moderator, admin)
- Media uploads with SHA256 deduplication
- Paginated, sortable and filterable listings
"""

__version__ = "0.1.0"
