from app.exception.base_exception import BaseCustomException, ErrorCode

class ParkingSpotNotFoundError(BaseCustomException):
    error_code = ErrorCode.PARKING_NOT_FOUND
    message = "주차장 요금 데이터가 존재하지 않습니다."
    status_code = 404
