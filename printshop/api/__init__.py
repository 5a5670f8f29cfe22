"""
接口层: FastAPI路由与异常处理
"""
