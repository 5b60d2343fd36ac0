import time
import threading
from collections import namedtuple

from logger_config import logger

# 自定义起始时间 2023-01-01T00:00:00Z，41 位毫秒时间戳约可用 69 年
DEFAULT_EPOCH = 1672531200000

# 各部分位数
TIMESTAMP_BITS = 41
DATACENTER_ID_BITS = 5
WORKER_ID_BITS = 5
SEQUENCE_BITS = 12

# 最大值
MAX_DATACENTER_ID = -1 ^ (-1 << DATACENTER_ID_BITS)
MAX_WORKER_ID = -1 ^ (-1 << WORKER_ID_BITS)
SEQUENCE_MASK = -1 ^ (-1 << SEQUENCE_BITS)

# 移位
WORKER_ID_SHIFT = SEQUENCE_BITS
DATACENTER_ID_SHIFT = SEQUENCE_BITS + WORKER_ID_BITS
TIMESTAMP_SHIFT = SEQUENCE_BITS + WORKER_ID_BITS + DATACENTER_ID_BITS

MAX_ID = (1 << (TIMESTAMP_BITS + TIMESTAMP_SHIFT)) - 1

# 解析后的 ID 各字段，timestamp 为绝对毫秒时间戳
ParsedId = namedtuple("ParsedId", ["timestamp", "datacenter_id", "worker_id", "sequence"])


class ClockRolledBack(Exception):
    def __init__(self, last_timestamp, timestamp):
        self.last_timestamp = last_timestamp
        self.timestamp = timestamp
        super().__init__(
            f"时钟回拨 {last_timestamp - timestamp} 毫秒，拒绝生成ID (last={last_timestamp}, now={timestamp})")


def current_millis():
    return int(time.time() * 1000)


def parse_id(snowflake_id, epoch=DEFAULT_EPOCH):
    """
    将 ID 拆分为时间戳、数据中心 ID、机器 ID 和序列号。
    """
    return ParsedId(
        timestamp=(snowflake_id >> TIMESTAMP_SHIFT) + epoch,
        datacenter_id=(snowflake_id >> DATACENTER_ID_SHIFT) & MAX_DATACENTER_ID,
        worker_id=(snowflake_id >> WORKER_ID_SHIFT) & MAX_WORKER_ID,
        sequence=snowflake_id & SEQUENCE_MASK,
    )


class IdAllocator:
    def __init__(self, worker_id=0, datacenter_id=0, epoch=DEFAULT_EPOCH, clock=current_millis):
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise ValueError(f"worker_id 必须在 0 到 {MAX_WORKER_ID} 之间，当前为 {worker_id}")
        if not 0 <= datacenter_id <= MAX_DATACENTER_ID:
            raise ValueError(f"datacenter_id 必须在 0 到 {MAX_DATACENTER_ID} 之间，当前为 {datacenter_id}")
        # 起始时间晚于当前时间会使时间戳部分为负
        now = clock()
        if not 0 <= epoch <= now:
            raise ValueError(f"epoch 必须在 0 到当前时间 {now} 之间，当前为 {epoch}")

        # 机器标识，构造后只读
        self.worker_id = worker_id
        self.datacenter_id = datacenter_id
        self.epoch = epoch

        # 时钟来源，返回当前毫秒时间戳
        self.clock = clock

        self.sequence = 0
        self.last_timestamp = -1

        # 锁
        self.lock = threading.Lock()

        logger.info(f"ID生成器初始化: datacenter_id={datacenter_id}, worker_id={worker_id}, epoch={epoch}")

    def _til_next_millis(self, last_timestamp):
        timestamp = self.clock()
        while timestamp <= last_timestamp:
            timestamp = self.clock()
        return timestamp

    def allocate(self):
        with self.lock:
            timestamp = self.clock()
            if timestamp < self.last_timestamp:
                logger.error(f"时钟回拨，拒绝生成ID: last={self.last_timestamp}, now={timestamp}")
                raise ClockRolledBack(self.last_timestamp, timestamp)

            if timestamp == self.last_timestamp:
                self.sequence = (self.sequence + 1) & SEQUENCE_MASK
                if self.sequence == 0:
                    # 同一毫秒内序列号用尽，持锁等待下一毫秒
                    logger.debug(f"毫秒 {timestamp} 内序列号已用尽，等待时钟前进")
                    timestamp = self._til_next_millis(self.last_timestamp)
            else:
                self.sequence = 0

            self.last_timestamp = timestamp

            return ((timestamp - self.epoch) << TIMESTAMP_SHIFT) | \
                   (self.datacenter_id << DATACENTER_ID_SHIFT) | \
                   (self.worker_id << WORKER_ID_SHIFT) | \
                   self.sequence

    next_id = allocate

    def allocate_many(self, count):
        if count < 1:
            raise ValueError(f"count 必须大于 0，当前为 {count}")
        return [self.allocate() for _ in range(count)]

    def parse(self, snowflake_id):
        return parse_id(snowflake_id, self.epoch)

    def __iter__(self):
        return self

    def __next__(self):
        return self.allocate()
