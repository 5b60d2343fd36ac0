import json
from sanic import Sanic, response
from logger_config import logger
from id_config import id_config, server_config
from id_allocator import IdAllocator, ClockRolledBack, MAX_ID, SEQUENCE_MASK

# 单次批量获取 ID 的上限，等于一毫秒内的序列号容量
MAX_BATCH_SIZE = SEQUENCE_MASK + 1

# 雪花算法ID生成器，机器标识来自配置
gen = IdAllocator(worker_id=id_config['worker_id'], datacenter_id=id_config['datacenter_id'],
                  epoch=id_config['epoch'])
# 创建 Sanic 应用
app = Sanic("IdAllocator")
# JSON 形式输出异常
app.config.FALLBACK_ERROR_FORMAT = "json"


# 发送标准的 API http 响应格式
def send_http_resp(status, message, data=None):
    resp = {"status": status, "message": message} if data is None else {"status": status, "message": message,
                                                                        "data": data}
    return response.json(resp)


# 处理异常，将异常信息记录到日志中，并返回异常响应
def handle_exception(e):
    logger.error(str(e))
    return send_http_resp(0, str(e))


# 记录请求信息到日志文件的中间件
@app.middleware("request")
async def logging_request(request):
    logger.info(f"[srv] [req] ({request.method} {request.path}) {request.query_string}")


# 记录响应信息到日志文件的中间件
@app.middleware("response")
async def logging_response(request, response):
    resp = json.loads(response.body.decode("utf-8"))
    logger.info(f"[srv] [resp] ({request.method} {request.path}) {resp}")


# 获取单个 ID 的端点
@app.get("/v1/id")
async def get_id(request):
    try:
        # ID 超过 2^53，以字符串返回避免前端精度丢失
        return send_http_resp(1, "ID生成成功", {"id": str(gen.allocate())})
    except ClockRolledBack as e:
        return handle_exception(e)


# 批量获取 ID 的端点
@app.get("/v1/ids")
async def get_ids(request):
    count = request.args.get("count", "1")
    try:
        count = int(count)
    except ValueError:
        return send_http_resp(0, f"count 必须是整数: {count}")
    if not 1 <= count <= MAX_BATCH_SIZE:
        return send_http_resp(0, f"count 必须在 1 到 {MAX_BATCH_SIZE} 之间")
    try:
        return send_http_resp(1, "ID批量生成成功", {"ids": [str(i) for i in gen.allocate_many(count)]})
    except ClockRolledBack as e:
        return handle_exception(e)


# 解析 ID 各字段的端点
@app.get("/v1/id/<snowflake_id:int>")
async def parse_snowflake_id(request, snowflake_id):
    if not 0 <= snowflake_id <= MAX_ID:
        return send_http_resp(0, "ID超出有效范围")
    parsed = gen.parse(snowflake_id)
    return send_http_resp(1, "ID解析成功", {
        "id": str(snowflake_id),
        "timestamp": parsed.timestamp,
        "datacenter_id": parsed.datacenter_id,
        "worker_id": parsed.worker_id,
        "sequence": parsed.sequence
    })


# 查询当前机器标识的端点
@app.get("/v1/identity")
async def get_identity(request):
    return send_http_resp(1, "机器标识查询成功", {
        "worker_id": gen.worker_id,
        "datacenter_id": gen.datacenter_id,
        "epoch": gen.epoch
    })


if __name__ == "__main__":
    # 为了保证单个生成器实例独占机器标识，这里使用单进程模式
    logger.info(f"{server_config['host']}:{server_config['port']} is starting")
    app.run(host=server_config['host'], port=server_config['port'], single_process=True)
