import os


# 从环境变量读取整数配置，未设置时使用默认值
def load_env_int(name, default):
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"环境变量 {name} 必须是整数，当前为 {value!r}") from None


# ID 生成器配置，单节点部署时机器标识默认为 0
id_config = {
    'worker_id': load_env_int("IDALLOC_WORKER_ID", 0),
    'datacenter_id': load_env_int("IDALLOC_DATACENTER_ID", 0),
    'epoch': load_env_int("IDALLOC_EPOCH", 1672531200000)
}
# 日志配置
log_config = {
    'filename': os.environ.get("IDALLOC_LOG_FILE", "id_allocator.log"),
    'when': 'midnight',
    'backup_count': 7
}
# HTTP 服务配置
server_config = {
    'host': os.environ.get("IDALLOC_HOST", "0.0.0.0"),
    'port': load_env_int("IDALLOC_PORT", 8000)
}
