"""
配置验证框架 (Configuration Validation)
=======================================

提供供水网络配置的验证结果类型和通用验证规则。
各配置类通过 validate() 返回未通过的验证结果列表。
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional


class ValidationSeverity(Enum):
    """验证结果严重程度"""
    INFO = auto()       # 信息
    WARNING = auto()    # 警告
    ERROR = auto()      # 错误


@dataclass
class ValidationResult:
    """配置验证结果"""
    is_valid: bool                              # 是否通过验证
    severity: ValidationSeverity                # 严重程度
    message: str                                # 消息
    field_name: Optional[str] = None            # 相关字段名
    suggestion: Optional[str] = None            # 修复建议


_OK = ValidationResult(is_valid=True, severity=ValidationSeverity.INFO, message="OK")


class ConfigValidator:
    """
    配置验证器

    提供通用的配置验证规则
    """

    @staticmethod
    def validate_positive(value: float, name: str) -> ValidationResult:
        """验证正数"""
        if value <= 0:
            return ValidationResult(
                is_valid=False,
                severity=ValidationSeverity.ERROR,
                message=f"{name} 必须为正数，当前值: {value}",
                field_name=name,
                suggestion=f"将 {name} 设置为大于0的值"
            )
        return _OK

    @staticmethod
    def validate_range(value: float, min_val: float, max_val: float,
                       name: str) -> ValidationResult:
        """验证范围"""
        if value < min_val or value > max_val:
            return ValidationResult(
                is_valid=False,
                severity=ValidationSeverity.ERROR,
                message=f"{name} 超出范围 [{min_val}, {max_val}]，当前值: {value}",
                field_name=name,
                suggestion=f"将 {name} 设置在 [{min_val}, {max_val}] 范围内"
            )
        return _OK

    @staticmethod
    def validate_less_than(value1: float, value2: float,
                           name1: str, name2: str) -> ValidationResult:
        """验证小于关系"""
        if value1 >= value2:
            return ValidationResult(
                is_valid=False,
                severity=ValidationSeverity.ERROR,
                message=f"{name1} ({value1}) 必须小于 {name2} ({value2})",
                field_name=name1,
                suggestion=f"调整 {name1} 使其小于 {name2}"
            )
        return _OK

    @staticmethod
    def validate_unique(values: Any, name: str) -> ValidationResult:
        """验证名称唯一"""
        values = list(values)
        duplicates = sorted({v for v in values if values.count(v) > 1})
        if duplicates:
            return ValidationResult(
                is_valid=False,
                severity=ValidationSeverity.ERROR,
                message=f"{name} 存在重复: {', '.join(map(str, duplicates))}",
                field_name=name,
                suggestion=f"为每个 {name} 使用不同的名称"
            )
        return _OK


__all__ = [
    'ValidationSeverity',
    'ValidationResult',
    'ConfigValidator'
]
