"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Application settings for the BLAST compute service and job client.

    Environment variable names map directly to field names in uppercase.
    Example: `blast_api_url` reads from `BLAST_API_URL`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        api_prefix: Path prefix for all compute service routes.
        cors_allow_origins: Allowed CORS origins for browser clients.
        log_level: Root log level name.
        log_json: Whether logs render as JSON lines instead of console output.
        blast_api_url: Base URL of the compute service used by the job client.
        blast_request_timeout_seconds: HTTP request timeout for client calls.
        blast_poll_interval_seconds: Fixed delay between sequential status polls.
        blast_poll_max_attempts: Maximum status requests per job, `None` for unbounded.
        blast_poll_max_consecutive_failures: Transient poll failures tolerated in a row.
        blast_check_health_before_submit: Call `GET /health` before each client submission.
        blast_bin_path: Directory containing BLAST+ executables, blank for PATH lookup.
        blast_db_path: BLAST database path prefix.
        blast_fasta_file: FASTA file the BLAST database is built from.
        blast_temp_dir: Scratch directory for query and output files.
        blast_execution_timeout_seconds: Wall-clock limit for one BLAST process.
        blast_default_evalue: E-value used when a request omits it.
        blast_default_max_target_seqs: Max target sequences used when a request omits it.
        blast_default_matrix: Substitution matrix used when a request omits it.
        blast_database_name: Database label reported in result statistics.
        blast_database_version: Database version reported in result statistics.
        blast_database_total_sequences: Number of sequences in the BLAST database.
        job_store_max_size: Maximum number of jobs retained by the compute service.
        job_max_age_seconds: Age after which finished jobs are cleaned up.
        job_cleanup_interval_seconds: Period of the job cleanup loop.
        record_store_url: Optional SQLAlchemy URL of the protein record store.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=3001, ge=1, le=65535)
    api_prefix: str = Field(default="/api")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    blast_api_url: str = Field(default="http://localhost:3001/api", min_length=1)
    blast_request_timeout_seconds: float = Field(default=30.0, gt=0)
    blast_poll_interval_seconds: float = Field(default=2.0, ge=0)
    blast_poll_max_attempts: int | None = Field(default=150, ge=1)
    blast_poll_max_consecutive_failures: int = Field(default=3, ge=1)
    blast_check_health_before_submit: bool = True
    blast_bin_path: str = Field(default="")
    blast_db_path: str = Field(default="blastdb/hsndb", min_length=1)
    blast_fasta_file: str = Field(default="sequences.fasta", min_length=1)
    blast_temp_dir: str = Field(default="temp", min_length=1)
    blast_execution_timeout_seconds: float = Field(default=300.0, gt=0)
    blast_default_evalue: float = Field(default=10.0, ge=0)
    blast_default_max_target_seqs: int = Field(default=500, ge=1)
    blast_default_matrix: str = Field(default="BLOSUM62", min_length=1)
    blast_database_name: str = Field(default="HSNDB", min_length=1)
    blast_database_version: str = Field(default="2024.1", min_length=1)
    blast_database_total_sequences: int = Field(default=4533, ge=0)
    job_store_max_size: int = Field(default=1000, ge=1)
    job_max_age_seconds: float = Field(default=3600.0, gt=0)
    job_cleanup_interval_seconds: float = Field(default=300.0, gt=0)
    record_store_url: str | None = Field(default=None)

    @field_validator("blast_api_url", "blast_db_path", "blast_fasta_file", "blast_temp_dir", "blast_default_matrix")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("api_prefix")
    @classmethod
    def _validate_api_prefix(cls, value: str) -> str:
        stripped_value = value.strip().rstrip("/")
        if stripped_value and not stripped_value.startswith("/"):
            raise ValueError("api_prefix must start with '/'")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_value

    @field_validator("record_store_url")
    @classmethod
    def _validate_optional_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
