# Generated migration for the relay lifecycle and ledger models

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='InfoRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('request_code', models.CharField(max_length=6, unique=True)),
                ('call_id', models.CharField(max_length=255)),
                ('tenant_id', models.CharField(db_index=True, max_length=64)),
                ('recipient_phone', models.CharField(max_length=20)),
                ('info_type', models.CharField(default='general', max_length=50)),
                ('prompt_message', models.TextField()),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('expired', 'Expired'), ('invalid', 'Invalid')], db_index=True, default='pending', max_length=20)),
                ('received_value', models.TextField(blank=True, null=True)),
                ('invalid_reply_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('received_at', models.DateTimeField(blank=True, null=True)),
                ('expires_at', models.DateTimeField(db_index=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='SmsMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.CharField(db_index=True, max_length=64)),
                ('phone_number', models.CharField(db_index=True, max_length=20)),
                ('message_body', models.TextField()),
                ('direction', models.CharField(choices=[('inbound', 'Inbound'), ('outbound', 'Outbound')], max_length=10)),
                ('provider_message_sid', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('request_code', models.CharField(blank=True, db_index=True, max_length=6, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='CreditAccount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.CharField(max_length=64, unique=True)),
                ('credits', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='CreditTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.CharField(db_index=True, max_length=64)),
                ('amount', models.IntegerField()),
                ('type', models.CharField(choices=[('free_signup', 'Free signup'), ('usage', 'Usage'), ('purchase', 'Purchase')], max_length=20)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='TenantCredentials',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tenant_id', models.CharField(max_length=64, unique=True)),
                ('account_sid', models.CharField(max_length=64)),
                ('auth_token', models.CharField(max_length=128)),
                ('phone_number', models.CharField(max_length=20, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'tenant credentials',
            },
        ),
        migrations.AddIndex(
            model_name='inforequest',
            index=models.Index(fields=['tenant_id', 'recipient_phone', 'status', 'created_at'], name='relay_infor_tenant__7c1e2a_idx'),
        ),
        migrations.AddIndex(
            model_name='inforequest',
            index=models.Index(fields=['status', 'expires_at'], name='relay_infor_status_3f9b4d_idx'),
        ),
    ]
