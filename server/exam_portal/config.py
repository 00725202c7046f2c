from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration settings"""
    
    # Application
    app_name: str = "Exam Portal"
    debug: bool = False
    api_version: str = "v1"
    log_level: str = "INFO"
    
    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    
    # Database
    database_url: str = "sqlite:///./exam_portal.db"
    
    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
    
    # Teacher dashboard
    recent_alerts_limit: int = 10
    dashboard_timezone: str = "UTC"
    
    # Proctoring alerts
    queue_alerts_without_teachers: bool = False
    pending_alerts_limit: int = Field(default=100, ge=0)  # 0 disables queueing
    
    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
