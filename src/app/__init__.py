"""App: orquestração do endpoint de Flows.

Subpastas:
- bootstrap/: composition root (inicialização, wiring, singletons)
- coordinators/: handler do envelope criptografado por request
- services/: roteamento de telas e opções de data/horário
- domain/: modelos de agendamento
- protocols/: contratos (agenda)
- infra/: criptografia do envelope e client Cal.com
- observability/: correlation_id

Padrão: app executa; api adapta; config configura.
"""
