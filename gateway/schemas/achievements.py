from gateway.schemas.common import RequestModel, ResponseModel


class ConfirmRequest(RequestModel):
    address: str
    user: str
    token: str
    link: str


class ConfirmResponse(ResponseModel):
    user: str
    address: str
    hex_address: str
    link: str
    user_profile_name: str
    txid: str


class CreateRequest(RequestModel):
    user: str
    token: str
    address: str
    link: str
    title: str
    previous_link: str | None = None


class CreateResponse(ResponseModel):
    user: str
    address: str
    hex_address: str
    link: str
    title: str
    previous_link: str | None
    txid: str
    user_profile_name: str
    content_hash: str


class InitResponse(ResponseModel):
    txid: str
    rewards_address: str
