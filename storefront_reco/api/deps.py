# storefront_reco/api/deps.py
from fastapi import Depends
from storefront_reco.db.mongo import get_db
from storefront_reco.db.redis import get_redis
from storefront_reco.domain.services.engine import RecommendationEngine

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    # Returns the MongoDB database instance (async)
    return db

# Dependency for injecting the Redis client into endpoints/services
def redis_dep():
    return get_redis()

# One engine per request: repositories are thin wrappers over shared clients
def engine_dep(db = Depends(mongo_db), redis = Depends(redis_dep)) -> RecommendationEngine:
    return RecommendationEngine.from_stores(db, redis)
