from logging.handlers import TimedRotatingFileHandler
import logging

from id_config import log_config

# 设置日志格式
log_format = '[%(asctime)s] [%(levelname)s] %(message)s'
# 创建 TimedRotatingFileHandler 处理器，每天创建一个新的日志文件，保留最近 7 天的日志文件
# delay=True 表示首次写日志时才打开文件
timed_handler = TimedRotatingFileHandler(filename=log_config['filename'], when=log_config['when'], interval=1,
                                         backupCount=log_config['backup_count'], encoding='utf-8', delay=True)
timed_handler.setFormatter(logging.Formatter(log_format))

# 获取根日志记录器，并添加处理器
logger = logging.getLogger()
logger.setLevel(logging.DEBUG)
logger.addHandler(timed_handler)
