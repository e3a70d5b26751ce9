"""
Settings Configuration
使用 Pydantic 进行配置验证和管理
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36"
)


class HttpSettings(BaseSettings):
    """出站 HTTP 请求配置"""
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="固定的 User-Agent")
    timeout: float = Field(default=10.0, description="单次请求超时时间(秒)")
    max_attempts: int = Field(default=3, ge=1, description="总尝试次数 (含首次)")
    retry_backoff: float = Field(default=0.5, ge=0, description="指数退避基数(秒)")
    retry_backoff_max: float = Field(default=4.0, ge=0, description="单次退避上限(秒)")
    proxy: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("HTTPS_PROXY", "HTTP_PROXY"),
        description="出口代理, 启动时读取一次",
    )

    class Config:
        env_prefix = "HTTP_"
        populate_by_name = True


class CacheSettings(BaseSettings):
    """结果缓存配置"""
    ttl: int = Field(default=600, ge=0, description="成功结果的新鲜期(秒)")
    max_size: int = Field(default=1000, ge=1, description="最大缓存条目数")

    class Config:
        env_prefix = "CACHE_"


class ImageProxySettings(BaseSettings):
    """图片代理配置"""
    prefix: str = Field(default="/api/proxy/img.png", description="图片代理入口")

    class Config:
        env_prefix = "IMAGE_PROXY_"


class AuthSettings(BaseSettings):
    """登录配置 (仅用于登录链接)"""
    github_client_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("G_CLIENT_ID"),
        description="GitHub OAuth Client ID",
    )

    class Config:
        populate_by_name = True


class Settings(BaseSettings):
    """主配置类 - 聚合所有子配置"""

    http: HttpSettings = Field(default_factory=HttpSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    image_proxy: ImageProxySettings = Field(default_factory=ImageProxySettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """从指定的 .env 文件加载配置"""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            http=HttpSettings(),
            cache=CacheSettings(),
            image_proxy=ImageProxySettings(),
            auth=AuthSettings(),
        )


@lru_cache()
def get_settings() -> Settings:
    """获取全局配置单例"""
    return Settings.load_from_env_file()


# 便捷访问
def get_http_settings() -> HttpSettings:
    return get_settings().http


def get_cache_settings() -> CacheSettings:
    return get_settings().cache


def get_image_proxy_settings() -> ImageProxySettings:
    return get_settings().image_proxy


def get_auth_settings() -> AuthSettings:
    return get_settings().auth
