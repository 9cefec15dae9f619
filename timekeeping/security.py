"""安全模块：PIN 哈希与校验

- 使用 Passlib 管理哈希，优先采用 pbkdf2_sha256，兼容历史数据中的 bcrypt 哈希。
"""

from passlib.context import CryptContext

# 优先使用 pbkdf2_sha256，若环境可用则仍可兼容 bcrypt
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def get_pin_hash(pin: str) -> str:
    """对PIN进行哈希并返回哈希字符串。"""
    return pwd_context.hash(pin)


def verify_pin(plain_pin: str, pin_hash: str) -> bool:
    """验证PIN与哈希是否匹配；无法识别的哈希视为验证失败。"""
    try:
        return pwd_context.verify(plain_pin, pin_hash)
    except (ValueError, TypeError):
        return False
