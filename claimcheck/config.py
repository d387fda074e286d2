"""
Configuration management for claimcheck.

``Config`` resolves the runtime environment and loads the matching ``.env``
file; ``PipelineConfig`` holds the tunable pipeline settings.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import dotenv

from .constants import ConfigDefaults
from .core.models import Tier


class Config:
    """Centralized environment configuration."""

    _environment: Optional[str] = None
    _env_loaded: bool = False

    VALID_ENVIRONMENTS = {'development', 'testing', 'production'}

    @classmethod
    def _load_env_file(cls) -> None:
        """Load environment-specific .env file if it exists."""
        if cls._env_loaded:
            return

        env = cls._get_environment_no_load()
        project_root = cls.get_project_root()
        env_file = project_root / f'.env.{env}'

        if env_file.exists():
            dotenv.load_dotenv(env_file, override=True)
        else:
            # Only load default .env if no environment-specific file exists
            default_env_file = project_root / '.env'
            if default_env_file.exists():
                dotenv.load_dotenv(default_env_file, override=False)

        cls._env_loaded = True

    @classmethod
    def _get_environment_no_load(cls) -> str:
        """Get environment without loading .env files (to avoid recursion)."""
        env = os.environ.get('CLAIMCHECK_ENV', '').strip().lower()

        # Auto-detect testing environment
        if not env:
            if os.environ.get('PYTEST_CURRENT_TEST') or 'pytest' in sys.argv[0]:
                env = 'testing'

        if not env:
            env = 'development'

        return env

    @classmethod
    def get_environment(cls) -> str:
        """Get the current environment with proper priority order."""
        if cls._environment is not None:
            return cls._environment

        cls._load_env_file()
        env = cls._get_environment_no_load()

        if env not in cls.VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid environment '{env}'. Must be one of: {cls.VALID_ENVIRONMENTS}")

        cls._environment = env
        return env

    @classmethod
    def set_environment(cls, env: str) -> None:
        """Override the environment (useful for testing)."""
        if env not in cls.VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid environment '{env}'. Must be one of: {cls.VALID_ENVIRONMENTS}")
        cls._environment = env

    @classmethod
    def reset(cls) -> None:
        cls._environment = None
        cls._env_loaded = False

    @classmethod
    def is_testing(cls) -> bool:
        return cls.get_environment() == 'testing'

    @classmethod
    def is_production(cls) -> bool:
        return cls.get_environment() == 'production'

    @classmethod
    def get_env_var(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable with automatic .env file loading."""
        cls._load_env_file()
        value = os.environ.get(key, default)
        if isinstance(value, str) and not value.strip():
            return default
        return value

    @classmethod
    def get_factcheck_api_key(cls) -> Optional[str]:
        return cls.get_env_var('GOOGLE_FACTCHECK_API_KEY')

    @classmethod
    def get_news_api_key(cls) -> Optional[str]:
        return cls.get_env_var('NEWS_API_KEY')

    @classmethod
    def get_openai_api_key(cls) -> Optional[str]:
        return cls.get_env_var('OPENAI_API_KEY')

    @classmethod
    def get_openai_base_url(cls) -> Optional[str]:
        return cls.get_env_var('OPENAI_BASE_URL')

    @classmethod
    def get_reasoning_model(cls) -> str:
        return cls.get_env_var('OPENAI_MODEL', ConfigDefaults.REASONING_MODEL)

    @classmethod
    def get_log_level(cls) -> str:
        return cls.get_env_var('CLAIMCHECK_LOG_LEVEL', 'INFO').upper()

    @classmethod
    def get_database_path(cls) -> str:
        """Get database path for current environment."""
        db_path = cls.get_env_var('CLAIMCHECK_DB_PATH')
        if db_path:
            if db_path == ':memory:' or os.path.isabs(db_path):
                return db_path
            return str(cls.get_project_root() / db_path)

        db_names = {
            'development': 'claimcheck.db',
            'testing': 'test_claimcheck.db',
            'production': 'claimcheck.db'
        }
        db_name = db_names.get(cls.get_environment(), 'claimcheck.db')
        return str(cls.get_project_root() / db_name)

    @classmethod
    def get_project_root(cls) -> Path:
        return Path(__file__).resolve().parent.parent


@dataclass
class TierSettings:
    """Per-tier retrieval and processing limits."""
    max_claims: int
    max_evidence: int
    fact_checker_count: int
    confidence_threshold: int
    include_government: bool
    include_academic: bool
    search_depth: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_claims': self.max_claims,
            'max_evidence': self.max_evidence,
            'fact_checker_count': self.fact_checker_count,
            'confidence_threshold': self.confidence_threshold,
            'include_government': self.include_government,
            'include_academic': self.include_academic,
            'search_depth': self.search_depth,
        }


def _default_tiers() -> Dict[Tier, TierSettings]:
    return {
        Tier.FREE: TierSettings(
            max_claims=ConfigDefaults.FREE_MAX_CLAIMS,
            max_evidence=ConfigDefaults.FREE_MAX_EVIDENCE,
            fact_checker_count=ConfigDefaults.FREE_FACT_CHECKERS,
            confidence_threshold=ConfigDefaults.FREE_CONFIDENCE_THRESHOLD,
            include_government=False,
            include_academic=False,
            search_depth='standard',
        ),
        Tier.PREMIUM: TierSettings(
            max_claims=ConfigDefaults.PREMIUM_MAX_CLAIMS,
            max_evidence=ConfigDefaults.PREMIUM_MAX_EVIDENCE,
            fact_checker_count=ConfigDefaults.PREMIUM_FACT_CHECKERS,
            confidence_threshold=ConfigDefaults.CONFIDENCE_THRESHOLD,
            include_government=True,
            include_academic=True,
            search_depth='comprehensive',
        ),
    }


@dataclass
class PipelineConfig:
    """
    Configuration for the verification pipeline and its components.

    Centralizes timeouts, tier limits and credentials so components can be
    built and tested with explicit settings.
    """

    default_language: str = ConfigDefaults.DEFAULT_LANGUAGE
    category_timeout: float = ConfigDefaults.CATEGORY_TIMEOUT
    reasoning_timeout: float = ConfigDefaults.REASONING_TIMEOUT
    request_timeout: int = ConfigDefaults.REQUEST_TIMEOUT
    max_retries: int = ConfigDefaults.MAX_RETRIES
    max_workers: int = ConfigDefaults.MAX_WORKERS
    max_concurrent_claims: int = ConfigDefaults.MAX_CONCURRENT_CLAIMS
    tiers: Dict[Tier, TierSettings] = field(default_factory=_default_tiers)

    # Credentials
    factcheck_api_key: Optional[str] = None
    news_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    reasoning_model: str = ConfigDefaults.REASONING_MODEL

    database_path: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_config()

    def _validate_config(self):
        if not ConfigDefaults.MIN_CATEGORY_TIMEOUT <= self.category_timeout <= ConfigDefaults.MAX_CATEGORY_TIMEOUT:
            raise ValueError(
                f"category_timeout must be within [{ConfigDefaults.MIN_CATEGORY_TIMEOUT}, "
                f"{ConfigDefaults.MAX_CATEGORY_TIMEOUT}] seconds"
            )

        if self.reasoning_timeout <= 0:
            raise ValueError("reasoning_timeout must be positive")

        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")

        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")

        if self.max_concurrent_claims <= 0:
            raise ValueError("max_concurrent_claims must be positive")

        for tier in Tier:
            if tier not in self.tiers:
                raise ValueError(f"Missing settings for tier '{tier.value}'")
            settings = self.tiers[tier]
            if settings.max_claims <= 0 or settings.max_evidence <= 0:
                raise ValueError(f"Tier '{tier.value}' limits must be positive")
            if not 0 <= settings.confidence_threshold <= 100:
                raise ValueError(f"Tier '{tier.value}' confidence_threshold must be within [0, 100]")

        if self.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log_level '{self.log_level}'")

    def tier_settings(self, tier: Tier) -> TierSettings:
        return self.tiers[tier]

    @property
    def reasoning_available(self) -> bool:
        return bool(self.openai_api_key)

    @classmethod
    def from_environment(cls, **overrides: Any) -> 'PipelineConfig':
        """Build configuration from environment variables and .env files."""
        values: Dict[str, Any] = {
            'factcheck_api_key': Config.get_factcheck_api_key(),
            'news_api_key': Config.get_news_api_key(),
            'openai_api_key': Config.get_openai_api_key(),
            'openai_base_url': Config.get_openai_base_url(),
            'reasoning_model': Config.get_reasoning_model(),
            'database_path': Config.get_database_path(),
            'log_level': Config.get_log_level(),
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'PipelineConfig':
        """Create configuration from dictionary."""
        values = dict(config_dict)
        if 'tiers' in values:
            values['tiers'] = {
                Tier(name) if not isinstance(name, Tier) else name:
                    settings if isinstance(settings, TierSettings) else TierSettings(**settings)
                for name, settings in values['tiers'].items()
            }
        return cls(**values)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary (credentials are not included)."""
        return {
            'default_language': self.default_language,
            'category_timeout': self.category_timeout,
            'reasoning_timeout': self.reasoning_timeout,
            'request_timeout': self.request_timeout,
            'max_retries': self.max_retries,
            'max_workers': self.max_workers,
            'max_concurrent_claims': self.max_concurrent_claims,
            'tiers': {tier.value: settings.to_dict() for tier, settings in self.tiers.items()},
            'reasoning_model': self.reasoning_model,
            'database_path': self.database_path,
            'log_level': self.log_level,
        }

    def __str__(self) -> str:
        return f"PipelineConfig({self.to_dict()})"
