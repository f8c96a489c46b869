"""模块说明：__init__。"""
