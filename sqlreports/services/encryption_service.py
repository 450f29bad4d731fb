"""
加密服务
用于加密和解密配置数据库中保存的数据库密码
"""
from cryptography.fernet import Fernet, InvalidToken
from typing import Optional

from ..config import get_settings
from ..utils.logger import get_logger

logger = get_logger(__name__)


class EncryptionService:
    """加密服务类"""
    
    def __init__(self, key: Optional[str] = None):
        """
        初始化加密服务
        
        Args:
            key: 加密密钥（32字节URL安全的base64编码字符串）
                 如果为None，则使用配置中的 ENCRYPTION_KEY
                 如果配置中也不存在，则生成临时密钥（重启后无法解密已保存的密码）
        """
        if key is None:
            key = get_settings().encryption_key
        if not key:
            key = Fernet.generate_key().decode()
            logger.warning(
                "未找到ENCRYPTION_KEY配置，已生成临时密钥，"
                "请将 ENCRYPTION_KEY 添加到.env文件"
            )
        
        self.cipher = Fernet(key.encode())
    
    def encrypt(self, plaintext: Optional[str]) -> str:
        """
        加密字符串
        
        Args:
            plaintext: 明文字符串
            
        Returns:
            加密后的字符串（base64编码），空值返回空字符串
        """
        if not plaintext:
            return ""
        return self.cipher.encrypt(plaintext.encode()).decode()
    
    def decrypt(self, ciphertext: Optional[str]) -> str:
        """
        解密字符串
        
        Args:
            ciphertext: 密文字符串（base64编码）
            
        Returns:
            解密后的明文字符串
            
        Raises:
            ValueError: 如果密文无效或密钥错误
        """
        if not ciphertext:
            return ""
        try:
            return self.cipher.decrypt(ciphertext.encode()).decode()
        except InvalidToken:
            raise ValueError("无法解密数据库密码，请检查 ENCRYPTION_KEY")
    
    @staticmethod
    def generate_key() -> str:
        """生成新的加密密钥"""
        return Fernet.generate_key().decode()


# 全局加密服务实例
_encryption_service = None


def get_encryption_service() -> EncryptionService:
    """获取全局加密服务实例"""
    global _encryption_service
    if _encryption_service is None:
        _encryption_service = EncryptionService()
    return _encryption_service
