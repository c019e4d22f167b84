"""配置模块

应用工厂、中间件、异常处理和路由注册分别从子模块导入。
本包不做re-export：models 依赖 config.settings，导入 config 时不能连带导入应用和路由。
"""
