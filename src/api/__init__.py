"""API: camada de borda HTTP.

Responsabilidades:
- Receber o envelope criptografado do WhatsApp Flows
- Mapear erros do core para status HTTP
- Expor liveness

Subpastas:
- routes/: endpoints HTTP (flows, health)

NÃO PODE conter: criptografia, regras de tela, IO de agenda.
"""
