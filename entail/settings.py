from typing import Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from entail.domain.enums import ParserBackend


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env', env_file_encoding='utf-8', extra='ignore'
    )

    # Engine process
    ENGINE_PATH: str = 'naturalli'
    ENGINE_SOFT_COSTS: bool = True
    ENGINE_MAX_TICKS: int = 100000
    ENGINE_OPTIONS: Dict[str, str] = {}
    USE_FAKE_ENGINE: bool = False

    # Alignment cache
    CACHE_ENABLED: bool = True
    CACHE_READ_PATH: str = 'tmp/naturalli_classifier_search.cache'
    CACHE_WRITE_PATH: str = 'tmp/naturalli_classifier_search_2.cache'

    # Model / fusion
    MODEL_PATH: Optional[str] = None
    ALIGNMENT_WEIGHT: float = 0.10
    USE_ENGINE_ALIGNMENT_COST: bool = True

    # Parsing
    PARSER_BACKEND: ParserBackend = ParserBackend.SPACY
    SPACY_MODEL: str = 'en_core_web_sm'
    MAX_TREE_LINES: int = 30

    LOG_LEVEL: str = 'INFO'


settings = Settings()
