"""
Configuration module for environment variable validation and type-safe config.

This module validates the catalog's environment variables on first use
and provides a type-safe configuration object.
"""
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_PRODUCTS_TABLE = "http-crud-tutorial-items"
DEFAULT_IMPORT_BUCKET = "import-s3-to-ddb-dev-data"
DEFAULT_IMPORT_MAX_WORKERS = 8


@dataclass
class Config:
    """Type-safe configuration object with validated environment variables."""

    products_table: str = DEFAULT_PRODUCTS_TABLE
    import_bucket: str = DEFAULT_IMPORT_BUCKET
    import_max_workers: int = DEFAULT_IMPORT_MAX_WORKERS
    aws_region: str = "us-east-1"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create Config instance from environment variables.

        Raises:
            ValueError: If environment variables are present but invalid.
        """
        products_table = os.environ.get("PRODUCTS_TABLE", DEFAULT_PRODUCTS_TABLE)
        if not products_table.strip():
            raise ValueError("PRODUCTS_TABLE environment variable must not be empty")

        import_bucket = os.environ.get("IMPORT_BUCKET", DEFAULT_IMPORT_BUCKET)
        if not import_bucket.strip():
            raise ValueError("IMPORT_BUCKET environment variable must not be empty")

        raw_workers = os.environ.get(
            "IMPORT_MAX_WORKERS", str(DEFAULT_IMPORT_MAX_WORKERS)
        )
        try:
            import_max_workers = int(raw_workers)
        except ValueError:
            raise ValueError(
                f"IMPORT_MAX_WORKERS must be an integer, got: {raw_workers}"
            ) from None
        if import_max_workers < 1:
            raise ValueError(
                f"IMPORT_MAX_WORKERS must be at least 1, got: {import_max_workers}"
            )

        aws_region = os.environ.get("AWS_REGION", "us-east-1")
        log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

        # Validate log level
        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if log_level not in valid_log_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {valid_log_levels}, got: {log_level}"
            )

        return cls(
            products_table=products_table,
            import_bucket=import_bucket,
            import_max_workers=import_max_workers,
            aws_region=aws_region,
            log_level=log_level,
        )


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config: The validated configuration object

    Raises:
        ValueError: If environment variables are invalid.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config
