# kinolab/planning/__init__.py
# 规划核心：状态空间、优化目标、采样、图、搜索与 AIT*-Kinodynamic 规划器
