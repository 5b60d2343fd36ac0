import os
import tempfile

# 测试期间日志写到临时目录
os.environ.setdefault("IDALLOC_LOG_FILE", os.path.join(tempfile.gettempdir(), "id_allocator_test.log"))
