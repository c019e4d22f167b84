from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from config.settings import settings
from models.database import get_db
from models import User, UserRole

# 配置
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

# 密码加密
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

security = HTTPBearer(auto_error=False)

_READ = [
    "project:read", "task:read", "milestone:read", "risk:read",
    "weekly:read", "notification:read",
]

# 权限说明：
# Administrator / MainPMO：所有资源读写，可审批项目，可手动触发定时任务
# SubPMO / DepartmentDirector / Executive：读写项目、任务、里程碑、风险，可审批项目
# ProjectManager：读写项目、任务、里程碑、风险，提交周报
# User：只读，可更新任务
PERMISSION_MAP = {
    UserRole.ADMINISTRATOR: _READ + [
        "project:write", "project:approve", "task:write", "milestone:write",
        "risk:write", "weekly:write", "job:run",
    ],
    UserRole.MAIN_PMO: _READ + [
        "project:write", "project:approve", "task:write", "milestone:write",
        "risk:write", "weekly:write", "job:run",
    ],
    UserRole.SUB_PMO: _READ + [
        "project:write", "project:approve", "task:write", "milestone:write", "risk:write",
    ],
    UserRole.DEPARTMENT_DIRECTOR: _READ + [
        "project:write", "project:approve", "task:write", "milestone:write", "risk:write",
    ],
    UserRole.EXECUTIVE: _READ + [
        "project:write", "project:approve", "task:write", "milestone:write", "risk:write",
    ],
    UserRole.PROJECT_MANAGER: _READ + [
        "project:write", "task:write", "milestone:write", "risk:write", "weekly:write",
    ],
    UserRole.USER: _READ + ["task:write"],
}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """生成密码哈希"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """创建访问令牌"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """验证令牌"""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="无效的认证凭据",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if payload.get("sub") is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="无效的认证凭据",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security), db: Session = Depends(get_db)) -> User:
    """获取当前用户"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="缺少认证凭据",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(credentials.credentials)
    user = db.query(User).filter(User.username == payload.get("sub")).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="用户不存在",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="用户已被禁用"
        )

    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """获取当前活跃用户"""
    return current_user


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    """认证用户"""
    user = db.query(User).filter(User.username == username).first()
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def check_permission(user: User, required_permission: str) -> bool:
    """检查用户权限"""
    return required_permission in PERMISSION_MAP.get(user.role, [])


def require_permission(permission: str):
    """权限依赖"""
    def permission_checker(current_user: User = Depends(get_current_active_user)):
        if not check_permission(current_user, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="权限不足"
            )
        return current_user
    return permission_checker
