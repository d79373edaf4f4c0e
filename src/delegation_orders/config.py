"""Centralized configuration for delegation orders."""

import os


class Config:
    """
    Delegation order configuration with environment variable overrides.

    All configuration values are centralized here with sensible defaults.
    Values can be overridden via environment variables.
    """

    # ========================================================================
    # Order Store
    # ========================================================================
    ORDER_STORE_BACKEND: str = os.getenv("ORDER_STORE_BACKEND", "memory")
    ORDER_KEY_PREFIX: str = os.getenv("ORDER_KEY_PREFIX", "order:")
    ORDER_NUM_BYTES: int = int(os.getenv("ORDER_NUM_BYTES", "12"))

    # ========================================================================
    # Redis Configuration
    # ========================================================================
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    REDIS_MAX_CONNECTIONS: int = int(os.getenv("REDIS_MAX_CONNECTIONS", "50"))
    REDIS_SOCKET_CONNECT_TIMEOUT: float = float(
        os.getenv("REDIS_SOCKET_CONNECT_TIMEOUT", "2")
    )
    REDIS_SOCKET_TIMEOUT: float = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2"))
    REDIS_CONNECT_RETRIES: int = int(os.getenv("REDIS_CONNECT_RETRIES", "3"))
    REDIS_CONNECT_RETRY_DELAY: float = float(
        os.getenv("REDIS_CONNECT_RETRY_DELAY", "0.2")
    )
    REDIS_CONNECT_RETRY_MAX_DELAY: float = float(
        os.getenv("REDIS_CONNECT_RETRY_MAX_DELAY", "2")
    )

    # ========================================================================
    # Hipchat Notifications
    # ========================================================================
    HIPCHAT_ROOM_ID: str = os.getenv("HIPCHAT_ROOM_ID", "")
    HIPCHAT_API_KEY: str = os.getenv("HIPCHAT_API_KEY", "")
    HIPCHAT_HOST: str = os.getenv("HIPCHAT_HOST", "api.hipchat.com")
    # Host the per-owner delegation links point at
    HIPCHAT_RO_HOST: str = os.getenv("HIPCHAT_RO_HOST", "localhost:8080")
    NOTIFY_TIMEOUT: float = float(os.getenv("NOTIFY_TIMEOUT", "5"))

    STORE_BACKENDS = ("memory", "redis")

    @classmethod
    def validate(cls) -> bool:
        """
        Validate configuration consistency.

        Checks:
        - ORDER_STORE_BACKEND names a known backend
        - Order numbers carry enough entropy
        - Redis and notification timeouts are positive

        Returns:
            True if validation passes

        Raises:
            ValueError: If validation fails
        """
        errors = []

        if cls.ORDER_STORE_BACKEND not in cls.STORE_BACKENDS:
            errors.append(
                f"ORDER_STORE_BACKEND must be one of {', '.join(cls.STORE_BACKENDS)}, "
                f"got {cls.ORDER_STORE_BACKEND!r}"
            )

        if not cls.ORDER_KEY_PREFIX:
            errors.append("ORDER_KEY_PREFIX must not be empty")

        if cls.ORDER_NUM_BYTES < 8:
            errors.append(f"ORDER_NUM_BYTES must be >= 8, got {cls.ORDER_NUM_BYTES}")

        if cls.REDIS_MAX_CONNECTIONS <= 0:
            errors.append(
                f"REDIS_MAX_CONNECTIONS must be > 0, got {cls.REDIS_MAX_CONNECTIONS}"
            )
        if cls.REDIS_SOCKET_CONNECT_TIMEOUT <= 0:
            errors.append(
                "REDIS_SOCKET_CONNECT_TIMEOUT must be > 0, "
                f"got {cls.REDIS_SOCKET_CONNECT_TIMEOUT}"
            )
        if cls.REDIS_SOCKET_TIMEOUT <= 0:
            errors.append(
                f"REDIS_SOCKET_TIMEOUT must be > 0, got {cls.REDIS_SOCKET_TIMEOUT}"
            )
        if cls.REDIS_CONNECT_RETRIES <= 0:
            errors.append(
                f"REDIS_CONNECT_RETRIES must be > 0, got {cls.REDIS_CONNECT_RETRIES}"
            )

        if cls.NOTIFY_TIMEOUT <= 0:
            errors.append(f"NOTIFY_TIMEOUT must be > 0, got {cls.NOTIFY_TIMEOUT}")

        if errors:
            raise ValueError(f"Config validation failed: {'; '.join(errors)}")

        return True
