from django.urls import path
from . import painel, views
app_name = 'agendamentos'
urlpatterns = [
    path('', views.index, name='index'),
    path('health/', views.health, name='health'),
    path('servicos/<int:service_id>/profissionais/', views.professionals_for_service, name='professionals_for_service'),
    path('slots/', views.slots_for_day, name='slots_for_day'),
    path('agendar/', views.wizard_state, name='wizard_state'),
    path('agendar/<slug:event>/', views.wizard_event, name='wizard_event'),

    path('painel/login/', painel.login_view, name='painel_login'),
    path('painel/logout/', painel.logout_view, name='painel_logout'),
    path('painel/agendamentos/', painel.appointments, name='painel_appointments'),
    path('painel/agendamentos/<int:appointment_id>/status/', painel.appointment_status, name='painel_appointment_status'),
    path('painel/servicos/', painel.services, name='painel_services'),
    path('painel/servicos/<int:service_id>/', painel.service_detail, name='painel_service_detail'),
    path('painel/servicos/<int:service_id>/excluir/', painel.service_delete, name='painel_service_delete'),
    path('painel/profissionais/', painel.professionals, name='painel_professionals'),
    path('painel/profissionais/<int:professional_id>/', painel.professional_detail, name='painel_professional_detail'),
    path('painel/profissionais/<int:professional_id>/excluir/', painel.professional_delete, name='painel_professional_delete'),
    path('painel/profissionais/<int:professional_id>/agenda/', painel.professional_schedule, name='painel_professional_schedule'),
]
