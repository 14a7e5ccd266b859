"""
AetherForge - 扩展编译与动态加载
AetherForge - extension compilation and dynamic loading for game servers.
"""

__app_name__ = "AetherForge"
__version__ = "1.0.0"
