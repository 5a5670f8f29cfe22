"""
静态配置: 多语言文案目录
"""
