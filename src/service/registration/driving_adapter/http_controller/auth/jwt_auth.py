"""
Bearer token verification for the external identity provider

Tokens are HS256 JWTs signed with the shared SECRET_KEY. They are trusted as
issued: no credential store lookup happens here.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from uuid import UUID

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import AuthenticationError, DomainError
from src.service.registration.domain.entity.user_entity import UserEntity


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_days = settings.ACCESS_TOKEN_EXPIRE_DAYS

    def create_jwt_token(self, user_entity: UserEntity) -> str:
        """Issue a token the way the identity provider does (local tooling and tests)"""
        now = datetime.now(timezone.utc)
        payload = {
            'sub': str(user_entity.id),
            'exp': now + timedelta(days=self.token_expire_days),
            'iat': now,
            'user_id': str(user_entity.id),
            'email': user_entity.email,
            'name': user_entity.display_name,
            'role': user_entity.role.value,
        }

        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    @staticmethod
    def extract_token(*, authorization: Optional[str], cookie_token: Optional[str]) -> Optional[str]:
        if authorization:
            scheme, _, credentials = authorization.partition(' ')
            if scheme.lower() == 'bearer' and credentials:
                return credentials.strip()
        return cookie_token

    def get_current_user_info_from_jwt(self, token: Optional[str]) -> UserEntity:
        if not token:
            raise AuthenticationError('Not authenticated')

        payload = self.decode_jwt_token(token)

        user_id = payload.get('user_id') or payload.get('sub')
        role = payload.get('role')
        if not user_id or not role:
            raise AuthenticationError('Invalid token')

        try:
            # Rebuild UserEntity from JWT payload (no DB query)
            return UserEntity(
                id=UUID(str(user_id)),
                email=payload.get('email') or '',
                display_name=payload.get('name'),
                role=UserEntity.validate_role(role),
            )
        except (ValueError, DomainError):
            raise AuthenticationError('Invalid token')
