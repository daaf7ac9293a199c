import time

from jose import jwt


class TokenManager:
    def __init__(self, secret: str, ttl: int = 3600, algorithm: str = "HS256"):
        """
        :param secret: HMAC signing key
        :param ttl: token lifetime in seconds (default one hour)
        :param algorithm: JWS algorithm
        """
        self.secret = secret
        self.ttl = ttl
        self.algorithm = algorithm

    def create_token(self, user_id: str) -> str:
        issued_at = int(time.time())
        payload = {"userId": user_id, "iat": issued_at, "exp": issued_at + self.ttl}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)
