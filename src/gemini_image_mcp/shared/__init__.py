"""共享模块：图像生成适配层与响应格式化。"""
