"""
Pydantic models for captured network activity
"""
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RequestEvent(BaseModel):
	"""Outgoing request seen on the network feed"""
	model_config = ConfigDict(frozen=True)

	method: str
	url: str

	def to_log_line(self) -> str:
		return f"Request: [Method: {self.method}, URL: {self.url}]"


class ResponseEvent(BaseModel):
	"""Response received on the network feed"""
	model_config = ConfigDict(frozen=True, populate_by_name=True)

	status: int
	url: str
	content_type: Optional[str] = Field(default=None, alias="contentType")

	def to_log_line(self) -> str:
		return f"Response: [Status: {self.status}, URL: {self.url}, Content-Type: {self.content_type}]"


NetworkEvent = Union[RequestEvent, ResponseEvent]
