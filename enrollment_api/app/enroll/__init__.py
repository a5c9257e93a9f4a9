"""设备注册模块"""
