"""
URL configuration for relay app.
"""
from django.urls import path
from relay.views import AgentRequestView, DirectSmsView, ExpireRequestsView, InboundSmsView

urlpatterns = [
    path('agent/', AgentRequestView.as_view(), name='agent-request'),
    path('agent/<str:tenant_id>/', AgentRequestView.as_view(), name='agent-request-tenant'),
    path('send/<str:tenant_id>/', DirectSmsView.as_view(), name='direct-sms'),
    path('sms/', InboundSmsView.as_view(), name='inbound-sms'),
    path('expire/', ExpireRequestsView.as_view(), name='expire-requests'),
]
