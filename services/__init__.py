"""
Service layer for the product catalog.

Wraps DynamoDB and S3 behind small service classes and holds the catalog
and import logic, keeping Lambda handlers free of infrastructure concerns.
"""
