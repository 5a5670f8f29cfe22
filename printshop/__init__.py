"""
3D打印店铺核心: 报价协商、优惠券折扣引擎、多语言报价对话
"""
