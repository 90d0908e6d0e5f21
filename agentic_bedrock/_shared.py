# Copyright (c) Microsoft. All rights reserved.

from typing import Final

from botocore.exceptions import ClientError

__all__ = ["BEDROCK_DEFAULT_REGION", "ERROR_MESSAGES", "UNEXPECTED_ERROR_MESSAGE", "classify_client_error"]

BEDROCK_DEFAULT_REGION: Final[str] = "us-east-1"

UNEXPECTED_ERROR_MESSAGE: Final[str] = (
    "An unexpected error occurred (e.g., invalid JSON returned by the service or an unknown error code)."
)

# Fallback messages for the Bedrock runtime error codes, used when the service sends no message.
ERROR_MESSAGES: Final[dict[str, str]] = {
    "AccessDeniedException": (
        "The request is denied because you do not have sufficient permissions to perform the requested action."
    ),
    "InternalServerException": "An internal server error occurred.",
    "ModelErrorException": "The request failed due to an error while processing the model.",
    "ModelNotReadyException": (
        "The model specified in the request is not ready to serve inference requests. "
        "The AWS SDK will automatically retry the operation up to 5 times."
    ),
    "ModelTimeoutException": (
        "The request took too long to process. Processing time exceeded the model timeout length."
    ),
    "ResourceNotFoundException": "The specified resource ARN was not found.",
    "ServiceQuotaExceededException": "Your request exceeds the service quota for your account.",
    "ServiceUnavailableException": "The service isn't currently available.",
    "ThrottlingException": "Your request was denied due to exceeding the account quotas for Amazon Bedrock.",
    "ValidationException": "The input fails to satisfy the constraints specified by Amazon Bedrock.",
}


def classify_client_error(error: ClientError) -> tuple[str, str]:
    """Returns the error code and a human readable message for a Bedrock ClientError.

    The service message wins when present, then the default text for the code,
    then the generic unexpected error text.
    """
    details = error.response.get("Error", {})
    code = details.get("Code") or "Unknown"
    message = details.get("Message") or ERROR_MESSAGES.get(code, UNEXPECTED_ERROR_MESSAGE)
    return code, message
