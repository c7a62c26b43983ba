"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
"""

from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Query refinement weights (tuning constants, not derived)
    refine_weight_base: float = 1.0
    refine_weight_kept: float = 1.4
    refine_weight_accepted: float = 1.8
    refine_color_hint_bonus: float = 0.6
    refine_max_kept_titles: int = 5
    refine_max_keywords: int = 12

    # Candidate queue
    low_queue_threshold: int = 3  # Reject prefetches when queue drops below this

    # Enrichment provider
    enrichment_provider: str = "heuristic"  # "heuristic" | "ollama" | "openai" | "deepseek" | "openrouter"
    enrichment_timeout_seconds: float = 3.5
    enrichment_max_kept_titles: int = 5
    llm_model: str = "qwen2.5:7b"
    llm_api_key: str = ""  # Required for cloud providers
    llm_api_base_url: str = "http://localhost:11434"  # Ollama default
    llm_temperature: float = 0.2
    llm_max_tokens: int = 256

    # Image search provider (Openverse)
    image_search_base_url: str = "https://api.openverse.org/v1"
    image_search_timeout_seconds: float = 8.0
    image_search_retry_delay_seconds: float = 0.5
    image_search_license_type: str = "all-cc"
    image_search_page_size: int = 20

    # Session defaults
    default_seed_query: str = "lonely, dark, single figure, horizon"
    presets: List[str] = [
        "lonely, dark, single figure, horizon",
        "urban night, neon, rain, solitude",
        "stormy sea, small boat, dramatic",
        "warm nostalgic, golden hour, film grain",
    ]
    enable_manual_research: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()
