from pydantic_settings import BaseSettings

DEFAULT_INCLUDE_DOMAINS = (
    "instagram.com,socialblade.com,influencermarketinghub.com,"
    "klear.com,upfluence.com,hypeauditor.com"
)


class Settings(BaseSettings):
    # Model provider: openrouter | openai | anthropic
    model_provider: str = "openrouter"
    default_model: str = ""  # empty = provider default
    model_max_tokens: int = 4096
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Search provider
    search_provider: str = "tavily"  # tavily | brave
    tavily_api_key: str = ""
    brave_api_key: str = ""
    search_fallback_to_tavily: bool = True
    search_time_range: str = "year"  # day | week | month | year
    search_include_domains: str = DEFAULT_INCLUDE_DOMAINS

    # Discovery loop
    target_platform: str = "Instagram"
    max_iterations: int = 2
    max_results_per_query: int = 10
    max_content_chars: int = 15000
    max_planned_queries: int = 3
    max_follow_up_queries: int = 2
    max_parallel_search: int = 4
    max_parallel_extract: int = 8
    analysis_fail_open: bool = True

    # Model call retries
    max_retry_attempts: int = 3
    retry_base_delay_ms: int = 1000

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "protected_namespaces": (),
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def include_domain_list(self) -> list[str]:
        return [d.strip() for d in self.search_include_domains.split(",") if d.strip()]


settings = Settings()
