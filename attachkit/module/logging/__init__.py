from attachkit.module.logging.logger import JsonLineFormatter, LoggingInterceptor, get_json_logger  # noqa: F401
