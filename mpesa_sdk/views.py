"""
Views receiving M-Pesa callbacks.

The gateway redelivers any callback that is not answered with HTTP 200, so
every view answers 200 with a ``{"ResultCode", "ResultDesc"}`` body and
reports processing failures through the log and ``ResultCode`` 1.
"""

import json
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from . import signals
from .responses import (
    StkCallback, B2CResult, TransactionStatusResponse, AccountBalanceResponse,
    C2BValidationResponse
)
from .services.c2b_service import C2BValidationService

logger = logging.getLogger(__name__)

c2b_validator = C2BValidationService()


def _acknowledge(result_code=0, result_desc='Accepted'):
    return JsonResponse({'ResultCode': result_code, 'ResultDesc': result_desc})


def _failed():
    return _acknowledge(1, 'Failed')


def _process_result(request, sender, parse, signal, label):
    try:
        data = json.loads(request.body)
        logger.info(f"Received {label}: {data}")
        result = parse(data)
        signal.send(sender=sender, result=result)
    except Exception as e:
        logger.error(f"Error processing {label}: {str(e)}")
        return _failed()
    return _acknowledge()


@csrf_exempt
@require_POST
def stk_push_callback(request):
    """
    Handle STK push results posted to the CallBackURL.
    """
    return _process_result(
        request, stk_push_callback, StkCallback.from_payload,
        signals.stk_push_callback_received, 'STK push callback'
    )


@csrf_exempt
@require_POST
def b2c_result_callback(request):
    """
    Handle B2C payment results posted to the ResultURL.
    """
    return _process_result(
        request, b2c_result_callback, B2CResult.from_payload,
        signals.b2c_result_received, 'B2C result'
    )


@csrf_exempt
@require_POST
def b2c_timeout_callback(request):
    """
    Handle B2C requests that timed out in the gateway queue.
    """
    return _process_result(
        request, b2c_timeout_callback, B2CResult,
        signals.b2c_timeout_received, 'B2C queue timeout'
    )


@csrf_exempt
@require_POST
def transaction_status_callback(request):
    return _process_result(
        request, transaction_status_callback, TransactionStatusResponse.from_payload,
        signals.transaction_status_result_received, 'transaction status result'
    )


@csrf_exempt
@require_POST
def account_balance_callback(request):
    return _process_result(
        request, account_balance_callback, AccountBalanceResponse.from_payload,
        signals.account_balance_result_received, 'account balance result'
    )


@csrf_exempt
@require_POST
def c2b_validation(request):
    """
    Accept or reject an incoming C2B payment.
    """
    try:
        data = json.loads(request.body)
        logger.info(f"Received C2B validation request: {data}")
        result = c2b_validator.handle_validation(data)
    except Exception as e:
        logger.error(f"Error processing C2B validation: {str(e)}")
        return _failed()
    return JsonResponse(result)


@csrf_exempt
@require_POST
def c2b_confirmation(request):
    """
    Acknowledge a completed C2B payment.
    """
    try:
        data = json.loads(request.body)
        result = c2b_validator.handle_confirmation(data)
        signals.c2b_confirmation_received.send(
            sender=c2b_confirmation, result=C2BValidationResponse(data)
        )
    except Exception as e:
        logger.error(f"Error processing C2B confirmation: {str(e)}")
        return _failed()
    return JsonResponse(result)
