# 工具模块：请直接从具体子模块导入，避免循环依赖
