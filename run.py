# run.py
import secrets
from app import create_app, db
from app.models import TokenAcesso, WebhookConfig, WebhookLog, hash_token
import click

app = create_app()

@app.shell_context_processor
def make_shell_context():
    return {'db': db, 'TokenAcesso': TokenAcesso, 'WebhookConfig': WebhookConfig, 'WebhookLog': WebhookLog}

@app.cli.command("create-db")
def create_db_command():
    """Cria as tabelas da base de dados."""
    with app.app_context():
        db.create_all()
    click.echo("Base de dados criada com sucesso.")

@app.cli.command("clear-db")
def clear_db_command():
    """Limpa e recria as tabelas da base de dados."""
    with app.app_context():
        db.drop_all()
        db.create_all()
    click.echo("Base de dados limpa e recriada com sucesso.")

@app.cli.command("create-token")
@click.argument("user_id")
def create_token_command(user_id):
    """Gera um token de acesso para USER_ID. O token é exibido uma única vez."""
    token = secrets.token_urlsafe(32)
    with app.app_context():
        db.session.add(TokenAcesso(user_id=user_id, token_hash=hash_token(token)))
        db.session.commit()
    click.echo(f"Token para {user_id}: {token}")

@app.cli.command("revoke-tokens")
@click.argument("user_id")
def revoke_tokens_command(user_id):
    """Revoga todos os tokens ativos de USER_ID."""
    with app.app_context():
        total = TokenAcesso.query.filter_by(user_id=user_id, ativo=True).update({'ativo': False})
        db.session.commit()
    click.echo(f"{total} token(s) revogado(s) para {user_id}.")

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000, debug=True)
