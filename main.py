import sys

from addict import Dict as Addict
from nicegui import ui, app, native
from loguru import logger
from dotenv import load_dotenv

# region - template

# python-dotenv 设置环境变量（必须早于 settings 导入）
load_dotenv(".env")

is_packed = getattr(sys, "frozen", False)

LOG_FORMAT = "<c>{time:YYYY-MM-DD HH:mm:ss.SSS}</c> | <level>{level: <8}</level> | <cyan>{name}:{function}:{line}</cyan> - {message}"

# 移除默认的日志处理器
logger.remove()
# 控制台输出 - 彩色，简洁格式
logger.add(
    sys.stdout,
    format=LOG_FORMAT,
    level="DEBUG",
    colorize=True,
    backtrace=True,
    diagnose=True
)
# 详细日志文件 - 包含所有级别
logger.add(
    "debug.log",
    format=LOG_FORMAT,
    level="DEBUG",
    rotation="10 MB",
    retention="7 days",
    compression="gz",
    backtrace=True,
    diagnose=True
)

# endregion

# 项目的包放在最下面导入，保证 .env 和日志先生效
from settings import dynamic_settings
from pages import register_pages

register_pages()


@app.on_startup
async def startup_event():
    logger.debug("app - startup, notes api: {}", dynamic_settings.api_base_url)


@app.on_shutdown
async def shutdown_event():
    logger.debug("app - shutdown")


if __name__ in {"__main__", "__mp_main__"}:

    props = Addict()
    props.title = dynamic_settings.title
    props.host = dynamic_settings.host

    if not is_packed:
        import argparse

        parser = argparse.ArgumentParser()
        parser.add_argument("--native", action="store_true", default=False)
        args, _ = parser.parse_known_args()

        props.native = args.native
        props.window_size = (1200, 900) if props.native else None

        ui.run(
            title=props.title,
            host=props.host,
            port=dynamic_settings.port,
            native=props.native,
            window_size=props.window_size,
        )
    else:
        port = native.find_open_port(start_port=12000, end_port=65535)
        logger.debug("启动端口：{}", port)
        ui.run(
            title=props.title,
            host=props.host,
            port=port,
            native=True,
            window_size=(1200, 900),
            reload=False
        )
