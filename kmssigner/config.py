"""Configuration management using msgspec Struct."""

import argparse
import os

import msgspec

AUTHORITY_BACKENDS = ("kms", "local")


class Config(msgspec.Struct, frozen=True):
    """Application configuration using msgspec Struct."""

    # HTTP server settings
    host: str = "127.0.0.1"
    port: int = 8080
    workers: int = 1

    # Logging
    log_level: str = "INFO"

    # Metrics settings
    metrics_enabled: bool = False
    metrics_host: str = "127.0.0.1"
    metrics_port: int = 8081

    # Signing authority
    authority: str = "kms"
    kms_key_id: str | None = None
    kms_region: str | None = None
    kms_endpoint_url: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    connect_timeout: float = 5.0
    read_timeout: float = 10.0

    # Flip s into the lower half of the curve order before returning
    canonical_s: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.port < 1 or self.port > 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")

        if self.metrics_port < 1 or self.metrics_port > 65535:
            raise ValueError(f"metrics_port must be between 1 and 65535, got {self.metrics_port}")

        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got {self.log_level}")

        if self.authority not in AUTHORITY_BACKENDS:
            raise ValueError(
                f"authority must be one of {AUTHORITY_BACKENDS}, got {self.authority}"
            )

        if self.authority == "kms" and not self.kms_key_id:
            raise ValueError("kms_key_id is required when authority is 'kms'")

        # Each worker would generate its own ephemeral key
        if self.authority == "local" and self.workers > 1:
            raise ValueError("authority 'local' can only be used with a single worker")

        has_key_id = self.aws_access_key_id is not None
        has_secret = self.aws_secret_access_key is not None
        if has_key_id != has_secret:
            raise ValueError(
                "Both aws_access_key_id and aws_secret_access_key must be provided together, "
                "or neither"
            )

        if self.connect_timeout <= 0:
            raise ValueError(f"connect_timeout must be positive, got {self.connect_timeout}")
        if self.read_timeout <= 0:
            raise ValueError(f"read_timeout must be positive, got {self.read_timeout}")

    @property
    def normalized_log_level(self) -> str:
        """Return normalized uppercase log level."""
        return self.log_level.upper()


def get_config(argv: list[str] | None = None) -> Config:
    """Parse command line arguments and return configuration.

    Defaults for the server and authority options come from the environment,
    so the same deployment can be driven entirely by env vars. AWS
    credentials are only ever read from the environment.
    """
    parser = argparse.ArgumentParser(
        description="kmssigner - raw secp256k1 signatures from an AWS KMS key",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host", default=os.getenv("KMSSIGNER_HOST", "127.0.0.1"), help="HTTP server host"
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=int(os.getenv("KMSSIGNER_PORT", "8080")),
        help="HTTP server port",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=int(os.getenv("KMSSIGNER_WORKERS", "1")),
        help="Number of Granian worker processes",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=os.getenv("KMSSIGNER_LOG_LEVEL", "INFO").upper(),
        help="Logging level",
    )
    parser.add_argument(
        "--metrics-enabled",
        action="store_true",
        default=False,
        help="Enable Prometheus metrics endpoint",
    )
    parser.add_argument("--metrics-port", type=int, default=8081, help="Port for metrics server")
    parser.add_argument("--metrics-host", default="127.0.0.1", help="Host for metrics server")
    parser.add_argument(
        "--authority",
        choices=AUTHORITY_BACKENDS,
        default=os.getenv("KMSSIGNER_AUTHORITY", "kms"),
        help="Signing authority backend ('local' uses an ephemeral in-process key)",
    )
    parser.add_argument(
        "--kms-key-id",
        default=os.getenv("AWS_KMS_KEY_ID"),
        help="AWS KMS key id or ARN of the secp256k1 signing key",
    )
    parser.add_argument(
        "--kms-region", default=os.getenv("AWS_KMS_REGION"), help="AWS region of the KMS key"
    )
    parser.add_argument(
        "--kms-endpoint-url",
        default=os.getenv("AWS_KMS_ENDPOINT_URL"),
        help="Override the KMS endpoint (e.g. a local KMS emulator)",
    )
    parser.add_argument(
        "--connect-timeout", type=float, default=5.0, help="KMS connect timeout in seconds"
    )
    parser.add_argument(
        "--read-timeout", type=float, default=10.0, help="KMS read timeout in seconds"
    )
    parser.add_argument(
        "--canonical-s",
        action="store_true",
        default=False,
        help="Normalize signatures to low-s form",
    )

    args = parser.parse_args(argv)

    config_dict: dict[str, object] = {
        "host": args.host,
        "port": args.port,
        "workers": args.workers,
        "log_level": args.log_level,
        "metrics_enabled": args.metrics_enabled,
        "metrics_port": args.metrics_port,
        "metrics_host": args.metrics_host,
        "authority": args.authority,
        "kms_key_id": args.kms_key_id,
        "kms_region": args.kms_region,
        "kms_endpoint_url": args.kms_endpoint_url,
        "aws_access_key_id": os.getenv("AWS_KMS_ACCESS_KEY_ID"),
        "aws_secret_access_key": os.getenv("AWS_KMS_SECRET_ACCESS_KEY"),
        "connect_timeout": args.connect_timeout,
        "read_timeout": args.read_timeout,
        "canonical_s": args.canonical_s,
    }

    try:
        config = msgspec.convert(config_dict, Config)
    except msgspec.ValidationError as e:
        raise ValueError(f"Configuration validation error: {e}")

    return config
