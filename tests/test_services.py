# tests/test_services.py
import io
from decimal import Decimal, Overflow

import boto3
import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from botocore.response import StreamingBody
from botocore.stub import ANY, Stubber

from backend.lib.cognito_service import CognitoService
from backend.lib.config import Settings
from backend.lib.dynamodb_service import DynamoDBService
from backend.lib.energy_core.errors import IdentityProviderError
from backend.lib.energy_core.models import ThresholdSetting
from backend.lib.s3_service import S3Service
from backend.lib.sns_service import SNSService
from backend.lib.timestream_service import TimestreamService

SETTINGS = Settings(
    sns_topic_arn="arn:aws:sns:us-east-1:123456789012:energy-alerts",
    user_pool_client_id="client-1",
)


def client_error(operation):
    return ClientError({'Error': {'Code': 'InternalFailure', 'Message': 'boom'}}, operation)


# -- DynamoDB ----------------------------------------------------------------

class FakeTable:
    def __init__(self, name):
        self.name = name
        self.calls = []
        self.responses = []
        self.error = None

    def _call(self, op, kwargs):
        self.calls.append((op, kwargs))
        if self.error:
            raise self.error
        return self.responses.pop(0) if self.responses else {}

    def put_item(self, **kwargs):
        return self._call('put_item', kwargs)

    def get_item(self, **kwargs):
        return self._call('get_item', kwargs)

    def update_item(self, **kwargs):
        return self._call('update_item', kwargs)

    def query(self, **kwargs):
        return self._call('query', kwargs)

    def scan(self, **kwargs):
        return self._call('scan', kwargs)


class FakeDynamoResource:
    def __init__(self):
        self.tables = {}

    def Table(self, name):
        return self.tables.setdefault(name, FakeTable(name))


@pytest.fixture
def dynamo():
    resource = FakeDynamoResource()
    return DynamoDBService(SETTINGS, dynamodb=resource), resource


def test_put_usage(dynamo):
    db, resource = dynamo
    item = {'id': 'u1', 'date': '2023-01-01', 'usage': Decimal('1.5'), 'timestamp': 't'}
    assert db.put_usage(item) is True
    assert resource.tables['EnergyUsage'].calls == [('put_item', {'Item': item})]


def test_put_usage_failure(dynamo):
    db, resource = dynamo
    resource.tables['EnergyUsage'].error = client_error('PutItem')
    assert db.put_usage({'id': 'u1'}) is False


def test_get_threshold(dynamo):
    db, resource = dynamo
    table = resource.tables['UserThresholds']
    table.responses = [{'Item': {'threshold': Decimal('50')}}, {}, {'Item': {}}]

    assert db.get_threshold('u1') == ThresholdSetting('u1', 50.0)
    assert db.get_threshold('u2') is None
    assert db.get_threshold('u3') == ThresholdSetting('u3', None)
    assert table.calls[0] == ('get_item', {'Key': {'id': 'u1'}, 'ProjectionExpression': 'threshold'})


def test_get_threshold_not_a_number(dynamo):
    db, resource = dynamo
    resource.tables['UserThresholds'].responses = [
        {'Item': {'threshold': 'high'}},
        {'Item': {'threshold': 'NaN'}},
    ]
    assert db.get_threshold('u1') is None
    assert db.get_threshold('u1') is None


def test_put_usage_number_out_of_range(dynamo):
    db, resource = dynamo
    resource.tables['EnergyUsage'].error = Overflow()
    assert db.put_usage({'id': 'u1', 'usage': Decimal('1e200')}) is False


def test_get_threshold_failure(dynamo):
    db, resource = dynamo
    resource.tables['UserThresholds'].error = client_error('GetItem')
    assert db.get_threshold('u1') is None


def test_update_threshold(dynamo):
    db, resource = dynamo
    table = resource.tables['UserThresholds']
    table.responses = [{'Attributes': {'threshold': Decimal('150')}}]

    assert db.update_threshold('u1', 150) == {'threshold': Decimal('150')}
    _, kwargs = table.calls[0]
    assert kwargs['Key'] == {'id': 'u1'}
    assert kwargs['UpdateExpression'] == 'SET threshold = :t'
    assert kwargs['ExpressionAttributeValues'] == {':t': Decimal('150')}


def test_query_usage_follows_pages(dynamo):
    db, resource = dynamo
    table = resource.tables['EnergyUsage']
    table.responses = [
        {'Items': [{'date': '2023-01-01'}], 'LastEvaluatedKey': {'id': 'u1', 'date': '2023-01-01'}},
        {'Items': [{'date': '2023-01-02'}]},
    ]

    items = db.query_usage('u1', '2023-01-01', '2023-01-31')

    assert items == [{'date': '2023-01-01'}, {'date': '2023-01-02'}]
    assert len(table.calls) == 2
    assert table.calls[1][1]['ExclusiveStartKey'] == {'id': 'u1', 'date': '2023-01-01'}


def test_query_usage_failure(dynamo):
    db, resource = dynamo
    resource.tables['EnergyUsage'].error = EndpointConnectionError(endpoint_url='http://localhost')
    assert db.query_usage('u1', '2023-01-01', '2023-01-31') is None


def test_scan_usage_follows_pages(dynamo):
    db, resource = dynamo
    table = resource.tables['EnergyUsage']
    table.responses = [
        {'Items': [{'id': 'u1'}], 'LastEvaluatedKey': {'id': 'u1', 'date': '2023-01-01'}},
        {'Items': [{'id': 'u2'}]},
    ]

    assert db.scan_usage() == [{'id': 'u1'}, {'id': 'u2'}]
    assert table.calls[0] == ('scan', {})
    assert table.calls[1][1] == {'ExclusiveStartKey': {'id': 'u1', 'date': '2023-01-01'}}


def test_scan_usage_failure(dynamo):
    db, resource = dynamo
    resource.tables['EnergyUsage'].error = client_error('Scan')
    assert db.scan_usage() is None


# -- Timestream --------------------------------------------------------------

class FakeTimestreamClient:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def write_records(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return {'RecordsIngested': {'Total': 1}}


def test_write_usage():
    client = FakeTimestreamClient()
    ts = TimestreamService(SETTINGS, client=client)

    assert ts.write_usage('u1', '2023-01-01', 12.5, 1672574400000) is True
    assert client.calls == [{
        'DatabaseName': 'EnergyMonitor',
        'TableName': 'EnergyUsage',
        'Records': [{
            'Dimensions': [{'Name': 'id', 'Value': 'u1'}, {'Name': 'date', 'Value': '2023-01-01'}],
            'MeasureName': 'energy_usage',
            'MeasureValue': '12.5',
            'MeasureValueType': 'DOUBLE',
            'Time': '1672574400000',
            'TimeUnit': 'MILLISECONDS',
        }],
    }]


def test_write_usage_failure():
    ts = TimestreamService(SETTINGS, client=FakeTimestreamClient(client_error('WriteRecords')))
    assert ts.write_usage('u1', '2023-01-01', 1, 0) is False


# -- SNS ---------------------------------------------------------------------

def test_publish():
    client = boto3.client('sns', region_name='us-east-1')
    sns = SNSService(SETTINGS, client=client)
    with Stubber(client) as stubber:
        stubber.add_response('publish', {'MessageId': 'm-1'}, {
            'TopicArn': SETTINGS.sns_topic_arn,
            'Subject': 'Energy Usage Threshold Exceeded',
            'Message': '{"userId": "u1"}',
        })
        assert sns.publish('{"userId": "u1"}', 'Energy Usage Threshold Exceeded') is True
        stubber.assert_no_pending_responses()


def test_publish_failure():
    client = boto3.client('sns', region_name='us-east-1')
    sns = SNSService(SETTINGS, client=client)
    with Stubber(client) as stubber:
        stubber.add_client_error('publish', service_error_code='AuthorizationError')
        assert sns.publish('msg', 'subject') is False


def test_publish_without_topic():
    sns = SNSService(Settings(), client=boto3.client('sns', region_name='us-east-1'))
    assert sns.publish('msg', 'subject') is False


# -- S3 ----------------------------------------------------------------------

def test_get_text():
    client = boto3.client('s3', region_name='us-east-1')
    s3 = S3Service(SETTINGS, client=client)
    data = b"date,usage\n2023-01-01,1\n"
    with Stubber(client) as stubber:
        stubber.add_response(
            'get_object',
            {'Body': StreamingBody(io.BytesIO(data), len(data))},
            {'Bucket': 'energy-csv-uploads', 'Key': 'u1-usage-1.csv'},
        )
        assert s3.get_text('energy-csv-uploads', 'u1-usage-1.csv') == data.decode()


def test_get_text_missing_object():
    client = boto3.client('s3', region_name='us-east-1')
    s3 = S3Service(SETTINGS, client=client)
    with Stubber(client) as stubber:
        stubber.add_client_error('get_object', service_error_code='NoSuchKey', http_status_code=404)
        assert s3.get_text('energy-csv-uploads', 'missing.csv') is None


def test_get_text_not_utf8():
    client = boto3.client('s3', region_name='us-east-1')
    s3 = S3Service(SETTINGS, client=client)
    data = b"\xff\xfe\x00"
    with Stubber(client) as stubber:
        stubber.add_response('get_object', {'Body': StreamingBody(io.BytesIO(data), len(data))})
        assert s3.get_text('energy-csv-uploads', 'bad.csv') is None


def test_put_object():
    client = boto3.client('s3', region_name='us-east-1')
    s3 = S3Service(SETTINGS, client=client)
    with Stubber(client) as stubber:
        stubber.add_response('put_object', {}, {
            'Bucket': 'energy-csv-uploads',
            'Key': 'u1-usage-1.csv',
            'Body': ANY,
            'ContentType': 'text/csv',
        })
        assert s3.put_object('energy-csv-uploads', 'u1-usage-1.csv', b'date,usage\n') is True
        stubber.add_client_error('put_object', service_error_code='AccessDenied', http_status_code=403)
        assert s3.put_object('energy-csv-uploads', 'u1-usage-1.csv', b'') is False


# -- Cognito -----------------------------------------------------------------

def test_login():
    client = boto3.client('cognito-idp', region_name='us-east-1')
    cognito = CognitoService(SETTINGS, client=client)
    with Stubber(client) as stubber:
        stubber.add_response('initiate_auth', {'AuthenticationResult': {
            'IdToken': 'id', 'AccessToken': 'access', 'RefreshToken': 'refresh', 'ExpiresIn': 3600,
        }}, {
            'AuthFlow': 'USER_PASSWORD_AUTH',
            'ClientId': 'client-1',
            'AuthParameters': {'USERNAME': 'alice', 'PASSWORD': 'pw'},
        })
        assert cognito.login('alice', 'pw') == {
            'idToken': 'id',
            'accessToken': 'access',
            'refreshToken': 'refresh',
            'expiresIn': 3600,
        }


def test_login_rejected():
    client = boto3.client('cognito-idp', region_name='us-east-1')
    cognito = CognitoService(SETTINGS, client=client)
    with Stubber(client) as stubber:
        stubber.add_client_error('initiate_auth', service_error_code='NotAuthorizedException',
                                 service_message='Incorrect username or password.',
                                 http_status_code=400)
        with pytest.raises(IdentityProviderError) as exc:
            cognito.login('alice', 'wrong')
    assert exc.value.status_code == 400
    assert exc.value.message == 'Incorrect username or password.'


def test_signup():
    client = boto3.client('cognito-idp', region_name='us-east-1')
    cognito = CognitoService(SETTINGS, client=client)
    with Stubber(client) as stubber:
        stubber.add_response('sign_up', {'UserConfirmed': False, 'UserSub': 'sub-1'}, {
            'ClientId': 'client-1',
            'Username': 'alice',
            'Password': 'Password123!',
            'UserAttributes': [{'Name': 'email', 'Value': 'a@example.com'}],
        })
        assert cognito.signup('alice', 'Password123!', 'a@example.com') == {
            'userConfirmed': False,
            'userSub': 'sub-1',
        }


def test_signup_user_exists():
    client = boto3.client('cognito-idp', region_name='us-east-1')
    cognito = CognitoService(SETTINGS, client=client)
    with Stubber(client) as stubber:
        stubber.add_client_error('sign_up', service_error_code='UsernameExistsException',
                                 service_message='User already exists', http_status_code=400)
        with pytest.raises(IdentityProviderError) as exc:
            cognito.signup('alice', 'Password123!', 'a@example.com')
    assert exc.value.status_code == 400
    assert exc.value.message == 'User already exists'


def test_garbled_stored_threshold_does_not_fail_ingestion():
    import json

    from backend.lambda_handlers import post_energy_input
    from backend.lib.energy_core.pipeline import UsageIngestionPipeline
    from fakes import FakeNotifier, FakeTimeSeries, fixed_clock

    resource = FakeDynamoResource()
    resource.Table('UserThresholds').responses = [{'Item': {'threshold': 'high'}}]
    series = FakeTimeSeries()
    pipeline = UsageIngestionPipeline(DynamoDBService(SETTINGS, dynamodb=resource), series,
                                      FakeNotifier(), clock=fixed_clock)

    result = post_energy_input.handle({
        'httpMethod': 'POST',
        'body': json.dumps({'date': '2023-01-01', 'usage': 100}),
    }, pipeline)

    assert result['statusCode'] == 200
    assert json.loads(result['body'])['thresholdExceeded'] is False
    assert len(series.writes) == 1
