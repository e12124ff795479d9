"""
URL configuration for the M-Pesa callback views.
"""

from django.urls import path
from . import views

urlpatterns = [
    path('callback/stk-push/', views.stk_push_callback, name='mpesa_stk_push_callback'),
    path('callback/b2c/result/', views.b2c_result_callback, name='mpesa_b2c_result'),
    path('callback/b2c/timeout/', views.b2c_timeout_callback, name='mpesa_b2c_timeout'),
    path('callback/transaction-status/', views.transaction_status_callback,
         name='mpesa_transaction_status_result'),
    path('callback/account-balance/', views.account_balance_callback,
         name='mpesa_account_balance_result'),
    path('c2b/validation/', views.c2b_validation, name='mpesa_c2b_validation'),
    path('c2b/confirmation/', views.c2b_confirmation, name='mpesa_c2b_confirmation'),
]
