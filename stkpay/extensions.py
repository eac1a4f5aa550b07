from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
migrate = Migrate()


class RedisClient:
    def __init__(self):
        self.client = None

    def init_app(self, app):
        import redis
        self.client = redis.Redis.from_url(app.config['REDIS_URL'])

    def get(self, key):
        return self.client.get(key)

    def set(self, key, value, ex=None):
        return self.client.set(key, value, ex=ex)

    def delete(self, key):
        return self.client.delete(key)


redis_client = RedisClient()
