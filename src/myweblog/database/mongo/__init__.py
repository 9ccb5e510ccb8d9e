from myweblog.database.mongo.data import MongoData

__all__ = ["MongoData"]
