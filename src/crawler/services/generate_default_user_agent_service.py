# src/crawler/services/generate_default_user_agent_service.py
import platform
from typing import Optional

from website_carbon.core.managers.config_manager import config_manager

PLATFORM_TOKENS = {
    "Windows": "Windows NT 10.0; Win64; x64",
    "Darwin": "Macintosh; Intel Mac OS X 10_15_7",
    "Linux": "X11; Linux x86_64",
}


def generate_default_user_agent(bot_token: Optional[str] = None) -> str:
    """
    Desktop Chrome user agent for the current OS, with the Chrome version
    from settings.json ('user_agent.chrome_version').

    Args:
        bot_token: Product token such as 'SitemapperBot/1.0', appended as a
            '(compatible; ...)' comment so site owners can tell who is asking.
    """
    os_part = PLATFORM_TOKENS.get(platform.system(), "Unknown OS")
    chrome_version = config_manager.get_nested("user_agent.chrome_version", "120.0.0.0")
    user_agent = (
        f"Mozilla/5.0 ({os_part}) AppleWebKit/537.36 (KHTML, like Gecko) "
        f"Chrome/{chrome_version} Safari/537.36"
    )
    return f"{user_agent} (compatible; {bot_token})" if bot_token else user_agent
