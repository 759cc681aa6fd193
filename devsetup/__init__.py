"""devsetup - 基于 DDEV 的 Laravel 本地开发环境一键装配工具"""

__version__ = "0.1.0"
