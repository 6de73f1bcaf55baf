"""
Módulo de Configuração

Define a classe de configuração principal. Implementa o padrão 'Fail Fast':
se uma variável crítica estiver faltando, a aplicação nem inicia.
"""

import os
from dotenv import load_dotenv

# Carrega variáveis do arquivo .env
load_dotenv()

class Config:
    """
    Classe de configuração base da aplicação.
    """

    # === SEGURANÇA CRÍTICA (Fail Fast) ===
    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        raise ValueError("ERRO CRÍTICO: 'SECRET_KEY' não encontrada no .env. A aplicação não pode iniciar insegura.")

    # === FIRESTORE ===
    # As credenciais vêm de GOOGLE_APPLICATION_CREDENTIALS (ou do ambiente Cloud Run).
    GOOGLE_CLOUD_PROJECT = os.environ.get('GOOGLE_CLOUD_PROJECT')
    if not GOOGLE_CLOUD_PROJECT:
        print("AVISO: 'GOOGLE_CLOUD_PROJECT' não configurado. O projeto padrão das credenciais será usado.")

    # === FIREBASE AUTHENTICATION (Identity Toolkit) ===
    FIREBASE_API_KEY = os.environ.get('FIREBASE_API_KEY')
    if not FIREBASE_API_KEY:
        print("AVISO: 'FIREBASE_API_KEY' ausente. O login e o cadastro de usuários não funcionarão.")

    IDENTITY_TOOLKIT_URL = os.environ.get(
        'IDENTITY_TOOLKIT_URL',
        'https://identitytoolkit.googleapis.com/v1'
    )
    AUTH_TIMEOUT = float(os.environ.get('AUTH_TIMEOUT', '10'))

    # Logins sem '@' viram e-mails sintéticos com este domínio
    LOGIN_EMAIL_DOMAIN = os.environ.get('LOGIN_EMAIL_DOMAIN', 'oficinadoaluno.com.br')

    # === FLASK ===
    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() in ('true', '1')
    JSON_SORT_KEYS = False

    # === RATE LIMIT / CSRF ===
    RATELIMIT_ENABLED = os.environ.get('RATELIMIT_ENABLED', 'True').lower() in ('true', '1')
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    LOGIN_RATE_LIMIT = os.environ.get('LOGIN_RATE_LIMIT', '10 per minute')
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None
