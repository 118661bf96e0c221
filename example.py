# -*- coding: utf-8 -*-
"""waterlight 使用示例"""

import logging

from dotenv import load_dotenv
from waterlight import (
    Waterlight,
    ErrorKind,
    WaterlightError,
    RateLimitError,
)

# 加载环境变量文件（WATERLIGHT_API_KEY / WATERLIGHT_BASE_URL）
load_dotenv()

# 配置日志（可选）
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# 创建客户端，api_key 缺省时从环境变量读取
client = Waterlight(max_retries=3)
print(f"Base URL: {client.base_url}")


# ========== 示例 1: 模型列表 ==========
print("\n=== 模型列表 ===")
models = client.models.list()
for model in models["data"]:
    print(f"- {model['id']} ({model['owned_by']})")


# ========== 示例 2: 非流式调用 ==========
print("\n=== 非流式调用 ===")
messages = [{"role": "user", "content": "介绍一下你自己"}]
response = client.chat.completions.create(model="mist-1-turbo", messages=messages)
print(f"Response: {response['choices'][0]['message']['content']}")
print(f"Usage: {response['usage']}")


# ========== 示例 3: 流式调用 ==========
print("\n=== 流式调用 ===")
messages = [{"role": "user", "content": "讲一个简短的故事"}]
with client.chat.completions.create(model="mist-1-turbo", messages=messages, stream=True) as stream:
    for chunk in stream:
        if chunk["choices"]:
            print(chunk["choices"][0]["delta"].get("content") or "", end="", flush=True)
print()


# ========== 示例 4: 提前结束流 ==========
print("\n=== 提前结束流 ===")
stream = client.chat.completions.create_stream(model="mist-1-turbo", messages=messages)
for i, chunk in enumerate(stream):
    if i >= 5:
        break
stream.close()  # 放弃迭代后释放连接
print("已读取前 5 个块")


# ========== 示例 5: 文本 Embedding ==========
print("\n=== 文本 Embedding ===")
texts = [
    "机器学习是人工智能的一个分支",
    "深度学习基于神经网络",
]
result = client.embeddings.create(input=texts, model="mist-embed-1")
for text, item in zip(texts, result["data"]):
    print(f"[{item['index']}] {text[:20]}... 维度: {len(item['embedding'])}")


# ========== 示例 6: 账单信息 ==========
print("\n=== 账单信息 ===")
billing = client.billing.get()
print(f"Plan: {billing['plan']}, spent: ${billing['spent_usd']:.2f}")
if "balance_usd" in billing:
    print(f"Balance: ${billing['balance_usd']:.2f}")


# ========== 示例 7: 错误处理 ==========
print("\n=== 错误处理 ===")
try:
    with Waterlight(api_key="wl-invalid", max_retries=0) as bad_client:
        bad_client.models.list()
except RateLimitError as e:
    print(f"限流，{e.retry_after}s 后重试")
except WaterlightError as e:
    # 也可以直接对 kind 做匹配
    if e.kind is ErrorKind.AUTHENTICATION:
        print(f"认证失败: {e.message} (request_id={e.request_id})")
    else:
        print(f"其他错误 [{e.kind.value}] status={e.status}: {e.message}")

client.close()
