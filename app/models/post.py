from sqlalchemy import Column, Integer, ForeignKey, Text
from sqlalchemy.orm import relationship
from .base import BaseModel

class Post(BaseModel):
    __tablename__ = "posts"
    
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    
    author = relationship("User", back_populates="posts")
