from django.apps import AppConfig


class MpesaSdkConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'mpesa_sdk'
    verbose_name = 'M-Pesa'
