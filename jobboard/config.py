# jobboard/config.py

from typing import Optional
from pydantic import BaseModel, Field
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseModel):
    # Backend REST API
    API_BASE_URL: str = Field(default=os.getenv("API_BASE_URL", "http://localhost:8000"))
    HTTP_TIMEOUT: float = Field(default=float(os.getenv("HTTP_TIMEOUT", "30")))

    # Object storage holding uploaded CVs (empty bucket disables CV links)
    AWS_REGION: str = Field(default=os.getenv("AWS_REGION", "eu-west-3"))
    AWS_S3_BUCKET: str = Field(default=os.getenv("AWS_S3_BUCKET", ""))

    # LLM config for match analysis
    LLM_PROVIDER: str = Field(default=os.getenv("LLM_PROVIDER", "gemini"))
    LLM_MODEL_NAME: str = Field(default=os.getenv("LLM_MODEL_NAME", "gemini-2.0-flash"))
    LLM_API_KEY: str = Field(default=os.getenv("LLM_API_KEY") or os.getenv("API_KEY", ""))
    LLM_BASE_URL: Optional[str] = Field(default=os.getenv("LLM_BASE_URL") or None)
    LLM_TEMPERATURE: float = Field(default=float(os.getenv("LLM_TEMPERATURE", "0.0")))
    # Request timeout in seconds for LiteLLM calls
    LLM_REQUEST_TIMEOUT: int = Field(default=int(os.getenv("LLM_REQUEST_TIMEOUT", "60")))

    # Session slot
    SESSION_STORAGE_KEY: str = Field(default=os.getenv("SESSION_STORAGE_KEY", "jobboard_auth"))
    # "browser": one slot per browser tab (served app). "local": one file slot for a single-user desktop run.
    SESSION_MODE: str = Field(default=os.getenv("SESSION_MODE", "browser"))
    SESSION_DIR: Optional[str] = Field(default=os.getenv("SESSION_DIR") or None)

    LOG_LEVEL: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))


    def full_model_id(self) -> str:
        """
        Return provider-prefixed model id for LiteLLM, e.g.:
        - 'gemini/gemini-2.0-flash'
        - 'openai/gpt-4o-mini'
        - 'ollama/llama3.2'
        """
        provider = self.LLM_PROVIDER.strip().lower()
        # If already prefixed, keep as is
        if "/" in self.LLM_MODEL_NAME:
            return self.LLM_MODEL_NAME
        return f"{provider}/{self.LLM_MODEL_NAME}"


settings = Settings()
